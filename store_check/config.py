# store_check/config.py
from dotenv import load_dotenv
import os

load_dotenv()

# API Keys
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
UPSTASH_VECTOR_REST_URL = os.getenv("UPSTASH_VECTOR_REST_URL")
UPSTASH_VECTOR_REST_TOKEN = os.getenv("UPSTASH_VECTOR_REST_TOKEN")

# Runtime parameters
CONCURRENCY = int(os.getenv("CONCURRENCY", "100"))
BATCH_SIZE = 15
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
EMBEDDING_MODEL = "text-embedding-3-small"

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))

# File names
STORES_FILE = os.getenv("STORES_FILE", "stores.csv")
INPUT_CSV = "pasted_inputs.csv"
OUTPUT_CSV = "resolved_stores.csv"

# Pasted text conventions
MAP_APP_TAGS = ("[네이버 지도]", "[카카오맵]")
URL_PREFIXES = ("https://", "http://")
CITY_PREFIXES = ("경기 성남시 ", "경기도 성남시 ")
DISTRICTS = ("수정구", "중원구", "분당구")

# Lexical matching (fuzzy distance, 0 = exact)
NAME_DISTANCE_THRESHOLD = 0.2
ADDRESS_DISTANCE_THRESHOLD = 0.1
RELAXED_NAME_DISTANCE_THRESHOLD = 0.4
RELAXED_ADDRESS_DISTANCE_THRESHOLD = 0.2

# Semantic matching (cosine similarity, 1 = identical)
STRICT_TOP_K = 1
STRICT_SIMILARITY_THRESHOLD = 0.85
WIDE_TOP_K = 3
WIDE_SIMILARITY_THRESHOLD = 0.7
ADDRESS_ONLY_DAMPING = 0.7

# Responses
MAX_PREVIEW = 5
