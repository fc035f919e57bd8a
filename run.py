# /run.py
import os

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from itabaza import create_app

app = create_app()

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 8080))
    print(f"Starting iTABAZA server on port {port}...")
    app.run(host='0.0.0.0', port=port, debug=app.config.get('DEBUG', False))
