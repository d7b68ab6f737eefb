def small_summary_record():
    return {
        'summary_points': ['Cells are the unit of life', 'Mitochondria produce ATP'],
        'flashcards': [
            {'question': 'What produces ATP?', 'answer': 'Mitochondria'},
        ],
    }


def browser_summary_record():
    # layout written by the browser front end
    return {
        'summary': ['Water boils at 100C at sea level'],
        'flashcards': [{'q': 'When does water boil?', 'a': 'At 100C at sea level'}],
    }


def broken_pdf_bytes():
    return b'%PDF-1.4\n% not a real document\n'
