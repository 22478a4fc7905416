from pathlib import Path

FILES_DIR = Path(__file__).parent / "files"


def sample_file(name: str) -> str:
    return str(FILES_DIR / name)


def contains_list(full_list, sub_list) -> bool:
    sub_len = len(sub_list)
    for offset in range(len(full_list) - len(sub_list) + 1):
        if full_list[offset:offset + sub_len] == sub_list:
            return True
    return False


def is_chronological(entries) -> bool:
    return all(a.timestamp <= b.timestamp for a, b in zip(entries, entries[1:]))
