from device_trust.cli.diagnose import main

raise SystemExit(main())
