from gke_credentials.cli import main

main()
