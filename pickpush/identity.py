__codename__ = "PICKPUSH"
__version__ = "0.1.0"
__tagline__ = "Pick it. Stage it. Ship it."

BANNER = r"""
 ___ _    _   ___         _
| _ (_)__| |_| _ \_  _ __| |_
|  _/ / _| / /  _/ || (_-< ' \
|_| |_\__|_\_\_|  \_,_/__/_||_|
"""
