from entity_generator.cli import main

main()
