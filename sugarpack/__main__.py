"""允许通过 python -m sugarpack 运行"""

from .cli.main import app

if __name__ == "__main__":
    app()
