from promo.cli.app import main

main()
