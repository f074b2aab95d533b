"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- revenue: 수익 기록 / 조회
- fund: SystemFund 조회
- periods: 정산 기간 생성 / 마감
- payout_methods: 지급 수단
- payouts: 지급 처리 / 조회
- audit: 감사 로그 조회
"""
