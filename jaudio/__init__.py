''' Conversion core for JAudio instrument banks, wave banks and waveform data '''
