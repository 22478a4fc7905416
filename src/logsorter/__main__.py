from logsorter.logsorter import main

main()
