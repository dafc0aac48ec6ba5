from glyphwave.cli import main

main()
