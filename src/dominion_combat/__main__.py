from dominion_combat.cli import main

raise SystemExit(main())
