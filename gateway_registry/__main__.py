from gateway_registry.app import main

main()
