#!/usr/bin/env python

import sys
import signal

try:
  import newts_sizing
except ImportError:
  raise SystemExit('[ERROR] Please make sure newts-sizing is installed properly')

# Ignore SIGPIPE
try:
  signal.signal(signal.SIGPIPE, signal.SIG_DFL)
except AttributeError:
  # OS=windows
  pass

sys.exit(newts_sizing.main())
