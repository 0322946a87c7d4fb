from ascnext.cli.app import main

main()
