'''
RuangBelajar Backend: weekly billing, payments and expenses for study-room classes.
The FastAPI application lives in ruang_belajar_backend.main.
'''
