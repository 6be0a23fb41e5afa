from pymongo import MongoClient
import certifi
from bundle_pricing.config import MONGODB_URI, DB_NAME, MENU_COLL

client = MongoClient(
    MONGODB_URI,
    tls=True,
    tlsCAFile=certifi.where(),
    serverSelectionTimeoutMS=30000,
)

db          = client[DB_NAME]
menu_items  = db[MENU_COLL]
