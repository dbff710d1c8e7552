"""Allow ``python -m aspect_weaver``."""

from aspect_weaver.main import main

if __name__ == "__main__":
    raise SystemExit(main())
