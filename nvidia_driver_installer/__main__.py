from nvidia_driver_installer.cli import main

main()
