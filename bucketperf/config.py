"""Constants and configuration for bucketperf."""

# Value substituted for any duration, latency or speed that could not be measured
DEFAULT_TIME_TAKEN = -1

# Fractional digits used when formatting numeric result fields
FLOAT_ROUND_DIGITS = 3

# Sizes of the benchmark objects stored in every bucket
FILESIZE_BYTES = {
    "2mib.txt": 2097152,
    "64mib.txt": 67108864,
    "256mib.txt": 268435456,
}

FILESIZE_MIB = {
    "2mib.txt": 2,
    "64mib.txt": 64,
    "256mib.txt": 256,
}

OBJECT_IDS = list(FILESIZE_BYTES)

# Bucket name suffix -> location label (display only)
REGIONS_MAP = {
    "northamerica-northeast1": "Montréal",
    "northamerica-northeast2": "Toronto",
    "us-central1": "Iowa",
    "us-east1": "South Carolina",
    "us-east4": "Northern Virginia",
    "us-east5": "Columbus",
    "us-south1": "Dallas",
    "us-west1": "Oregon",
    "us-west2": "Los Angeles",
    "us-west3": "Salt Lake City",
    "us-west4": "Las Vegas",
    "southamerica-east1": "São Paulo",
    "southamerica-west1": "Santiago",
    "europe-central2": "Warsaw",
    "europe-north1": "Finland",
    "europe-southwest1": "Madrid",
    "europe-west1": "Belgium",
    "europe-west2": "London",
    "europe-west3": "Frankfurt",
    "europe-west4": "Netherlands",
    "europe-west6": "Zürich",
    "europe-west8": "Milan",
    "europe-west9": "Paris",
    "me-west1": "Tel Aviv",
    "asia-east1": "Taiwan",
    "asia-east2": "Hong Kong",
    "asia-northeast1": "Tokyo",
    "asia-northeast2": "Osaka",
    "asia-northeast3": "Seoul",
    "asia-south1": "Mumbai",
    "asia-south2": "Delhi",
    "asia-southeast1": "Singapore",
    "asia-southeast2": "Jakarta",
    "australia-southeast1": "Sydney",
    "australia-southeast2": "Melbourne",
}

BUCKET_PREFIX = "gcsrbpa-"

# Public object URL, read straight from the bucket
OBJECT_URL_TEMPLATE = "https://storage.googleapis.com/{bucket}/{object_id}?alt=media"

# Benchmark server that proxies the same object through its own client library
DEFAULT_SERVER_URL = "https://regionalized-bucket-perf-mgsjbmdcoa-uw.a.run.app"
SERVER_DOWNLOAD_PATH = "/download/{bucket}/{object_id}"
SERVER_URL_ENV = "BUCKETPERF_SERVER_URL"

# Response header carrying the server's own upstream fetch time (ms)
LATENCY_HEADER = "rbf-client-library-latency"

# Default measurement settings
DEFAULT_TIMEOUT = 120.0

# Results page scraped by the batch harness
DEFAULT_RESULTS_PAGE = "https://storage.googleapis.com/rbf-test/index.html"
ROW_SELECTOR = "table tbody tr"
DEFAULT_EXPECTED_ROWS = 33
DEFAULT_WAIT_TIMEOUT = 30.0
DEFAULT_RUNS = 3
DEFAULT_BROWSER = "chrome"

# Extra seconds granted on top of a session's own population wait
WAIT_GRACE_S = 5.0

# Columns of a scraped results table row
BATCH_COLUMNS = [
    "bucket_region",
    "bucket_region_name",
    "file_size",
    "mib_s",
    "browser",
    "server",
    "server_client",
    "server_hop",
    "browser_boost_percent",
]

# User agent for HTTP requests
USER_AGENT = "bucketperf/0.1.0"
