from nrepl_mcp.cli import main

main()
