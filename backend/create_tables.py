import sys
import os
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from watchd.db import engine, Base
# Register every model on Base.metadata
from watchd.models import *

def main():
    """Create all database tables"""
    Base.metadata.create_all(bind=engine)
    print("All tables created successfully.")

if __name__ == "__main__":
    main()
