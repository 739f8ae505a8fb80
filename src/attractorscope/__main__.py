from attractorscope.experiment.cli import main

main()
