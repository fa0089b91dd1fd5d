COI_EXTRACTION_PROMPT = """You are an expert insurance document analyst specializing in Certificates of Insurance (ACORD 25 forms).

Extract structured data from this COI document. Be thorough and precise - this data will be checked automatically against a property manager's insurance requirements.

Return a JSON object with these fields:
- insured_name: Name of the insured party (the vendor or tenant)
- carrier: Insurance carrier/company name (first insurer listed if several)
- certificate_holder: Name of the certificate holder
- effective_date: Earliest policy start date on the certificate (YYYY-MM-DD)
- expiration_date: Earliest policy end date on the certificate (YYYY-MM-DD)
- coverages: an object keyed by coverage type. Only include coverage types that appear on the certificate. Allowed keys:
    general_liability, auto_liability, workers_comp, employers_liability, umbrella,
    professional_liability_eo, property_insurance, pollution_liability, liquor_liability, cyber_liability
  Each value is an object with:
    - amount: per occurrence / each accident / combined single limit as a plain number of US dollars (e.g. 1000000), or "Statutory" for workers compensation statutory limits, or null if not shown
    - aggregate: aggregate limit as a plain number of US dollars, or null
    - endorsements: list of endorsements shown for this coverage, using exactly these names when they apply:
      "Additional Insured", "Waiver of Subrogation", "Primary & Non-Contributory"
    - is_statutory: true when the WC STATUTE box is checked or statutory limits are stated
    - effective_date: policy effective date for this line (YYYY-MM-DD), or null
    - expiration_date: policy expiration date for this line (YYYY-MM-DD), or null

IMPORTANT: Being listed as "Certificate Holder" does NOT make someone an Additional Insured. Only list "Additional Insured" when the ADDL INSD column is marked or the description of operations names the holder as additional insured.

If a value isn't clearly present, use null. Never guess limits.

DOCUMENT:
<<DOCUMENT>>

Return ONLY valid JSON, no markdown."""
