import pytest

from israeli_bank_ynab.standardize import NormalizedTransaction

# Scraped transaction as returned for a credit card account
max_sample_txn = {
    'type': 'normal',
    'date': '2024-03-15T00:00:00+02:00',
    'processedDate': '2024-03-15T00:00:00+02:00',
    'originalAmount': 150,
    'originalCurrency': 'ILS',
    'chargedAmount': -150,
    'description': 'סופר פארם',
    'status': 'completed',
    'accountName': 'Max',
}

# Bank statement export (Hebrew headers, separate debit/credit columns)
leumi_sample_csv = (
    'תאריך,תאריך ערך,תיאור,אסמכתא,בחובה,בזכות,היתרה בש"ח\n'
    '15/03/2024,14/03/2024,קפה גרג,12345,"₪1,200.50",,"8,500.00"\n'
    '16/03/2024,16/03/2024,משכורת,67890,,"12,000.00","20,500.00"\n'
    '17/03/2024,17/03/2024,יתרה,,,,"20,500.00"\n'
)

# Credit card statement export
isracard_sample_csv = (
    'תאריך רכישה,שם בית עסק,סכום עסקה,סכום חיוב,פירוט נוסף\n'
    '10/03/24,AMAZON,"$50.00",180.25,עסקה בחו"ל\n'
    '11/03/24,שופרסל,95.90,95.90,\n'
)

# File previously written by this tool
ynab_sample_csv = (
    'Date,Payee,Memo,Outflow,Inflow\n'
    '2024-03-16,משכורת,,,12000.00\n'
    '2024-03-14,קפה גרג,"{""chargeDate"":""2024-03-15""}",1200.50,\n'
)


def make_txn(**overrides):
    """Scraped transaction with sensible defaults."""
    txn = {
        'type': 'normal',
        'date': '2024-03-15',
        'processedDate': '2024-03-15',
        'originalAmount': 100,
        'originalCurrency': 'ILS',
        'chargedAmount': -100,
        'description': 'Test',
        'status': 'completed',
    }
    txn.update(overrides)
    return txn


def make_normalized(date, amount, payee='Test', charge_date=''):
    """NormalizedTransaction with a signed amount."""
    return NormalizedTransaction(
        transaction_date=date,
        charge_date=charge_date,
        payee=payee,
        outflow=abs(amount) if amount < 0 else 0.0,
        inflow=amount if amount > 0 else 0.0,
    )


@pytest.fixture
def txn_factory():
    return make_txn


@pytest.fixture
def normalized_factory():
    return make_normalized


@pytest.fixture
def sample_txn():
    return dict(max_sample_txn)


@pytest.fixture
def leumi_csv():
    return leumi_sample_csv


@pytest.fixture
def isracard_csv():
    return isracard_sample_csv


@pytest.fixture
def ynab_csv():
    return ynab_sample_csv


@pytest.fixture
def log_file(tmp_path, monkeypatch):
    """Route the log file into the test's temporary directory."""
    path = tmp_path / 'test.log'
    monkeypatch.setenv('LOG_FILE', str(path))
    return path
