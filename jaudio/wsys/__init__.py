''' Wave bank (WSYS) model and transform stages '''
