from circuit_transit.server import main

main()
