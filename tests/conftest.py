import os

os.environ.setdefault('DETECTION_STEP_DELAY_MS', '0')
os.environ.setdefault('CLASSIFICATION_STEP_DELAY_MS', '0')
os.environ.setdefault('LOG_LEVEL', 'WARNING')
