from tilebloom.cli import main

main()
