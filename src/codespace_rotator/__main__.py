from codespace_rotator.cli import app_main


app_main()
