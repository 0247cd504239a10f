from stocksaga.cli.main import main

main()
