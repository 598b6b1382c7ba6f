"""Allow ``python -m expressgen``."""

from expressgen.pipeline import main

main()
