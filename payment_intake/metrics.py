from prometheus_client import Counter, Histogram

METRIC_PREFIX = 'payment_intake_'

PAYMENT_METRICS = {
    'charges': Counter(
        METRIC_PREFIX + 'charges_total',
        'Total number of recorded charges by terminal status',
        labelnames=['status', 'strategy'],
    ),
    'validation_failures': Counter(
        METRIC_PREFIX + 'validation_failures_total',
        'Total number of rejected charge or card validation requests',
        labelnames=['kind'],
    ),
    'gateway_errors': Counter(
        METRIC_PREFIX + 'gateway_errors_total',
        'Total number of charges aborted by a payment gateway error',
        labelnames=['operation'],
    ),
    'enqueued': Counter(
        METRIC_PREFIX + 'enqueued_total',
        'Total number of payments added to the pending queue',
    ),
    'drained': Counter(
        METRIC_PREFIX + 'drained_total',
        'Total number of queued payments moved to a terminal status',
        labelnames=['status'],
    ),
    'drain_duration_seconds': Histogram(
        METRIC_PREFIX + 'drain_duration_seconds',
        'Time spent processing one batch of pending payments',
        buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, 30),
    ),
}

NOTIFICATION_METRICS = {
    'sent': Counter(
        METRIC_PREFIX + 'notifications_sent_total',
        'Total number of payment notifications handed to the mailer',
        labelnames=['status'],
    ),
    'failed': Counter(
        METRIC_PREFIX + 'notifications_failed_total',
        'Total number of payment notifications that could not be sent',
        labelnames=['status'],
    ),
}
