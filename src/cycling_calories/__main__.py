from cycling_calories.cli import main

main()
