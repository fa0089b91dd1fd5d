from services.mock.coi import mock_coi_extract
