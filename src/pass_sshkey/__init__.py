"""
pass-sshkey: SSH key-pair management on top of the password store.

Key-pairs live twice: in the local SSH directory and, encrypted, in
the password store. The passphrase lives only in the password store.
Lose the laptop, keep the keys: ``pass-sshkey restore`` rebuilds
~/.ssh from the store.
"""

__version__ = "1.0.0"
__url__ = "https://github.com/zidenis/pass-sshkey"

VERSION_STRING = f"pass-extension-sshkey v{__version__}"
