from currency_exchange.server.run_server import main

main()
