PROJECT_NAME = "Assistant Army"
API_V1_STR = "/api/v1"

# Request headers carrying the verified owner identity set by the auth gateway
OWNER_ID_HEADER = "X-Owner-Id"
OWNER_TIMEZONE_HEADER = "X-Owner-Timezone"
MODEL_API_KEY_HEADER = "X-Model-Api-Key"
