"""Allow ``python -m codebottle``."""

from codebottle.app import main

main()
