from critical_chains.cli import app

if __name__ == "__main__":
    app()
