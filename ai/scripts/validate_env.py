import os
import sys
import tempfile
from pathlib import Path
from dotenv import load_dotenv

load_dotenv(Path(__file__).parent.parent / '.env')

errors = []
warnings = []

import argparse
import shutil

parser = argparse.ArgumentParser()
parser.add_argument('--strict', '-s', action='store_true', help='Convert warnings to failures')
args = parser.parse_args()
STRICT = args.strict

required = {
    'server': ['ENVIRONMENT', 'HOST', 'PORT'],
    'storage': ['REDIS_HOST', 'REDIS_PORT'],
}

def check_presence(cat, keys):
    for k in keys:
        if not os.getenv(k):
            errors.append(f"{cat}: Missing {k}")

for cat, keys in required.items():
    check_presence(cat, keys)

# Format checks
try:
    port = int(os.getenv('PORT', '0'))
    if port < 1 or port > 65535:
        errors.append('PORT must be integer between 1 and 65535')
except ValueError:
    errors.append('PORT must be an integer')

try:
    redis_port = int(os.getenv('REDIS_PORT', '6379'))
    if redis_port < 1 or redis_port > 65535:
        errors.append('REDIS_PORT must be integer between 1 and 65535')
except ValueError:
    errors.append('REDIS_PORT must be an integer')

for name in ('GEMINI_TIMEOUT', 'OPENAI_TIMEOUT'):
    try:
        if int(os.getenv(name, '60')) < 1:
            errors.append(f'{name} must be a positive integer')
    except ValueError:
        errors.append(f'{name} must be an integer')

try:
    attempts = int(os.getenv('GEMINI_RETRY_ATTEMPTS', '1'))
    if attempts < 1:
        errors.append('GEMINI_RETRY_ATTEMPTS must be at least 1')
    elif attempts > 1:
        warnings.append('GEMINI_RETRY_ATTEMPTS > 1 retries timed-out generation calls automatically')
except ValueError:
    errors.append('GEMINI_RETRY_ATTEMPTS must be an integer')

try:
    max_upload_mb = int(os.getenv('MAX_UPLOAD_SIZE_MB', '25'))
    if max_upload_mb < 1 or max_upload_mb > 500:
        errors.append('MAX_UPLOAD_SIZE_MB must be between 1 and 500')
except ValueError:
    errors.append('MAX_UPLOAD_SIZE_MB must be an integer')

if os.getenv('LOG_FORMAT', 'json') not in ('json', 'text'):
    errors.append("LOG_FORMAT must be 'json' or 'text'")

# credentials are normally supplied per request; server-side keys are optional
if not os.getenv('GEMINI_API_KEY'):
    warnings.append('GEMINI_API_KEY not set; clients must send their own key')
if not os.getenv('OPENAI_API_KEY'):
    warnings.append('OPENAI_API_KEY not set; clients must send their own key for transcription')

# Redis check
try:
    import redis
    r = redis.Redis(host=os.getenv('REDIS_HOST', 'redis'), port=int(os.getenv('REDIS_PORT', '6379')), password=os.getenv('REDIS_PASSWORD') or None, socket_timeout=3)
    if r.ping():
        print('Redis: OK')
except Exception as e:
    warnings.append(f'Redis check failed, summaries will not persist: {e}')

# Upload temp dir check
upload_dir = Path(os.getenv('UPLOAD_TEMP_DIR', os.path.join(tempfile.gettempdir(), 'smart_summary_uploads')))
try:
    upload_dir.mkdir(parents=True, exist_ok=True)
    if not os.access(upload_dir, os.W_OK):
        errors.append(f'Upload temp dir not writable: {upload_dir}')
    else:
        total, used, free = shutil.disk_usage(str(upload_dir))
        free_mb = free // (1024 * 1024)
        print(f'Upload temp dir: {upload_dir} ({free_mb} MB free)')
        if free_mb < 512:
            warnings.append('Upload temp dir free space is low (<512MB)')
except OSError as e:
    errors.append(f'Failed to verify/create upload temp dir: {e}')

if errors:
    print('\nENV validation failed:')
    for e in errors:
        print(' -', e)
    sys.exit(1)

if warnings:
    print('\nWarnings:')
    for w in warnings:
        print(' -', w)
    if STRICT:
        print('\nStrict mode enabled: treating warnings as errors')
        sys.exit(1)

print('\nAll critical validations passed')
sys.exit(0)
