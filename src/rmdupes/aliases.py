from rmdupes.core.models import SetOrder

SET_ORDER_ALIASES = {
    "discovery": SetOrder.DISCOVERY,
    "size": SetOrder.SIZE,
}

SET_ORDER_CHOICES = list(SET_ORDER_ALIASES.keys())

SET_ORDER_HELP_TEXT = (
    "Order of the duplicate sets in the output and during delete/link:\n"
    "  discovery  : Order in which each set was found (default)\n"
    "  size       : Largest reclaimable space first\n"
)

SORT_HELP_TEXT = (
    "Member order inside each set (mutually exclusive, default: --name).\n"
    "The first member is the one kept by --delete/--link --noprompt."
)

EPILOG_TEXT = """
Examples:
  Summarise duplicates in Downloads and all its subdirectories
  %(prog)s ~/Downloads -r -m

  Same as above, listing sizes and modification times, largest sets first
  %(prog)s ~/Downloads -r -m -S -t --set-order size

  Only consider files between 500KB and 10MB, skip hidden files
  %(prog)s ~/Downloads -r -m --minsize 500K --maxsize 10M --nohidden

  Choose interactively which file of each set to keep, delete the rest
  %(prog)s ~/Downloads -r -d

  Keep the oldest file of each set, replace the others with symbolic links (no prompt)
  %(prog)s ~/Downloads -r -l -N -M

  Same as above but move removed files to the system trash first
  %(prog)s ~/Downloads -r -l -N -M --trash
"""
