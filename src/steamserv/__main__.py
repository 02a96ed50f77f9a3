from steamserv.cli.cli import main

main()
