# -----------------------------------------------------------------------------
# FLATPAK BUNDLER
# -----------------------------------------------------------------------------
# Turns a compiled desktop application into a single-file Flatpak bundle:
# workspace -> manifest -> shared modules -> flatpak-builder -> build-bundle
# -----------------------------------------------------------------------------

__version__ = "0.1.0"
