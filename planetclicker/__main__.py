from planetclicker.cli import main

main()
