''' Sample format codecs and wave mixers '''
