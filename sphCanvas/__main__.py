from sphCanvas.runner import main

main()
