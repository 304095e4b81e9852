import os

# Qt objects in the tests never open a window.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
