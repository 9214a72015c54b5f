from toonify.cli import main

main()
