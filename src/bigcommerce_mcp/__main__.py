from bigcommerce_mcp.cli.app import cli

cli()
