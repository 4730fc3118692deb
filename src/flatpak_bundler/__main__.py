import sys

from flatpak_bundler.main import main

sys.exit(main())
