"""Version information for :mod:`pathsparql`."""

VERSION = "0.1.0"
