from assetpub.cli.app import main

main()
