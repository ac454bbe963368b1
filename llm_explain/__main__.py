"""Allow running as python -m llm_explain."""

from .cli import main

if __name__ == "__main__":
    main()
