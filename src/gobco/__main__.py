from gobco.cli import main

main()
