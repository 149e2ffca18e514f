from supercet.app import main

main()
