"""Review dashboard - Entry point."""

from dotenv import load_dotenv

from review_dashboard.cli import app

# Load environment variables from .env file
load_dotenv()

if __name__ == "__main__":
    app()
