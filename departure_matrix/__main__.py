from departure_matrix.app import main

raise SystemExit(main())
