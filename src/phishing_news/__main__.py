"""Entry point for running the digest reader as a module.

Allows running with: python -m src.phishing_news
"""

from src.phishing_news.cli import main

if __name__ == "__main__":
    main()
