from ocpdeploy.cli import main

main()
