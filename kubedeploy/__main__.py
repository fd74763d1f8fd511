from kubedeploy.cli.main import app_entry

app_entry()
