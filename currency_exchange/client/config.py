SERVER_IP = '127.0.0.1'
SERVER_PORT = 8888
API_PORT = 8000
RESPONSE_TIMEOUT_SECONDS = 5.0
MAX_PACKET_SIZE = 1024

# Currencies offered by the client
CURRENCIES = ['USD', 'EUR', 'GBP', 'JPY', 'CHF', 'CAD', 'AUD', 'CNY']
