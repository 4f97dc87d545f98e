from agent_recall.cli import main

main()
