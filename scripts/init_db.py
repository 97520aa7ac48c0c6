"""Creates the local products table, the photo bucket directory and prints a dev token."""
import sys

import pandas as pd

from beautyshelf.config import get_settings
from beautyshelf.core.security import create_access_token
from beautyshelf.models.product import PRODUCT_COLUMNS


settings = get_settings()

settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
products_path = settings.DATA_DIR / settings.PRODUCTS_FILE
if not products_path.exists():
    pd.DataFrame(columns=PRODUCT_COLUMNS).to_csv(products_path, index=False)
    print(f'Created {products_path}')
else:
    print(f'{products_path} already exists')

bucket_dir = settings.STORAGE_DIR / settings.DEFAULT_BUCKET
bucket_dir.mkdir(parents=True, exist_ok=True)
print(f'Photo bucket directory: {bucket_dir}')

user_id = sys.argv[1] if len(sys.argv) > 1 else 'dev-user'
print(f'Bearer token for {user_id}:')
print(create_access_token(settings, user_id, email=f'{user_id}@example.com'))
