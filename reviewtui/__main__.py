from reviewtui.main import cli

cli()
