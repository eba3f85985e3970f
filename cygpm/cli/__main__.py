from cygpm.cli import main

main()
