''' Instrument bank (IBNK) model and transform stages '''
